# Copyright 2017-present Kensho Technologies, LLC.
class SupergraphComposerError(Exception):
    """Generic error when composing GraphQL subgraph schemas."""


class SubgraphStructureError(SupergraphComposerError):
    """Raised if an input subgraph schema's structure is illegal.

    This may happen if the AST contains executable definitions (operations or fragments), if a
    root operation type is not an object type, if a type is defined twice within one subgraph,
    or if an entity key's field set cannot be parsed.
    """


class CompositionError(SupergraphComposerError):
    """Raised when composition produced error diagnostics and no supergraph could be emitted.

    The full, ordered list of diagnostics is available on the "diagnostics" attribute.
    """

    def __init__(self, diagnostics) -> None:
        """Record the diagnostics that caused the composition to fail."""
        if not diagnostics:
            raise ValueError(
                "Cannot raise CompositionError without at least one diagnostic, but "
                "received an empty list of diagnostics."
            )
        super().__init__()
        self.diagnostics = tuple(diagnostics)

    def __str__(self) -> str:
        """Explain every diagnostic, one per line."""
        return "Composition failed with {} diagnostic(s):\n{}".format(
            len(self.diagnostics),
            "\n".join(str(diagnostic) for diagnostic in self.diagnostics),
        )
