class HuffmanError(ValueError):
    """
    Base class for everything huffkit raises on bad input or misuse.
    """
    pass


# ---------------------------------------
# Alphabet / build
# ---------------------------------------
class EmptyAlphabet(HuffmanError):
    pass


class DuplicateSymbol(HuffmanError):
    pass


class InvalidWeight(HuffmanError):
    pass


class InvalidSymbol(HuffmanError):
    pass


# ---------------------------------------
# Encode / decode
# ---------------------------------------
class UnknownSymbol(HuffmanError):
    pass


class InvalidBit(HuffmanError):
    pass


class UnassignedCode(HuffmanError):
    """
    A well-formed bit that no code word starts with.
    Only a single-symbol table can hit this (its only code is '0').
    """
    pass


class IncompleteInput(HuffmanError):
    """
    Bits ran out in the middle of a code word.
    We refuse to guess the partial symbol.
    """
    pass


# ---------------------------------------
# Table navigation misuse
# ---------------------------------------
class EmptyTable(HuffmanError):
    pass


class NotInternalNode(HuffmanError):
    pass


class NotALeaf(HuffmanError):
    pass


# ---------------------------------------
# Packet container
# ---------------------------------------
class CorruptPacket(HuffmanError):
    pass


class MalformedTable(HuffmanError):
    """
    A node array that breaks the tree invariants (child order,
    weight sums, leaf/internal shape).
    """
    pass
