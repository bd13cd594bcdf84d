# Copyright 2021-present Kensho Technologies, LLC.
from dataclasses import dataclass
from typing import FrozenSet


@dataclass(frozen=True)
class CompositionOptions:
    """Settings of a composition run. The defaults compose sequentially with every check enabled."""

    # Number of worker threads used for the per-type merge and shareable checks. Output does not
    # depend on this setting.
    max_workers: int = 1

    # Names (without "@") of directives that must never reach the supergraph, even when every
    # subgraph defines them identically.
    excluded_directive_names: FrozenSet[str] = frozenset()

    # Whether to check that every field reachable by a query can be resolved by some subgraph.
    validate_resolvability: bool = True

    def __post_init__(self) -> None:
        """Validate fields."""
        if not isinstance(self.max_workers, int) or self.max_workers < 1:
            raise ValueError(
                "Expected max_workers to be a positive integer, but got {}.".format(
                    self.max_workers
                )
            )
        if isinstance(self.excluded_directive_names, str):
            raise ValueError(
                "Expected excluded_directive_names to be a set of directive names, but got the "
                'string "{}".'.format(self.excluded_directive_names)
            )
        for directive_name in self.excluded_directive_names:
            if directive_name.startswith("@"):
                raise ValueError(
                    'Directive names in excluded_directive_names must not start with "@", but '
                    'got "{}".'.format(directive_name)
                )
