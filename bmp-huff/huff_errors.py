class ContainerError(ValueError):
    """Compressed data could not be read back."""


class TruncatedInput(ContainerError):
    """The buffer ends before a field, the tree, the header or the bits it declares."""


class MalformedTree(ContainerError):
    """The serialized tree does not parse into a full binary tree."""


class EmptyAlphabetMismatch(ContainerError):
    """Non-zero original length paired with an empty tree."""
