"""
DependencyGraph -- Module dependency closure with cycle detection.

Responsibility:
    Answers which modules a module needs (transitively) and which modules
    need it, over an adjacency mapping ``{module: [dependencies]}``. Used by
    configuration to validate the module graph and to list the modules a
    rule family requires.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    The traversal is iterative with an explicit "visiting" set. Reaching a
    node that is still in progress is a cycle, regardless of depth; there is
    no reliance on the interpreter's recursion limit.

Failure modes:
    - DependencyCycleError carrying the offending path, e.g. a -> b -> a
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from posting_kernel.exceptions import DependencyCycleError


class DependencyGraph:
    """Directed graph of module -> dependency edges."""

    def __init__(self, dependencies: Mapping[str, Iterable[str]]):
        self._dependencies: dict[str, tuple[str, ...]] = {
            key: tuple(deps) for key, deps in dependencies.items()
        }
        dependents: dict[str, list[str]] = {}
        for key, deps in self._dependencies.items():
            for dep in deps:
                dependents.setdefault(dep, []).append(key)
        self._dependents = {key: tuple(val) for key, val in dependents.items()}

    @property
    def nodes(self) -> frozenset[str]:
        """Every module named as a key or as a dependency."""
        return frozenset(self._dependencies) | frozenset(self._dependents)

    def direct_dependencies(self, key: str) -> tuple[str, ...]:
        return self._dependencies.get(key, ())

    def transitive_dependencies(self, key: str) -> list[str]:
        """All modules ``key`` needs, excluding itself, in discovery order.

        Raises:
            DependencyCycleError: If a cycle is reachable from ``key``.
        """
        return self._walk(key, self._dependencies)

    def transitive_dependents(self, key: str) -> list[str]:
        """All modules that need ``key``, directly or indirectly.

        Raises:
            DependencyCycleError: If a cycle is reachable from ``key``.
        """
        return self._walk(key, self._dependents)

    def find_cycle(self) -> list[str] | None:
        """Return one cycle path if the graph has any, else None."""
        for node in sorted(self.nodes):
            try:
                self._walk(node, self._dependencies)
            except DependencyCycleError as e:
                return e.path
        return None

    def validate(self) -> None:
        """Raise DependencyCycleError if the graph has a cycle."""
        cycle = self.find_cycle()
        if cycle is not None:
            raise DependencyCycleError(cycle)

    @staticmethod
    def _walk(start: str, edges: Mapping[str, tuple[str, ...]]) -> list[str]:
        result: list[str] = []
        seen: set[str] = set()
        done: set[str] = set()
        visiting: set[str] = {start}
        path: list[str] = [start]
        stack: list[Iterator[str]] = [iter(edges.get(start, ()))]

        while stack:
            node = next(stack[-1], None)
            if node is None:
                stack.pop()
                finished = path.pop()
                visiting.discard(finished)
                done.add(finished)
                continue
            if node in visiting:
                raise DependencyCycleError(path[path.index(node):] + [node])
            if node not in seen:
                seen.add(node)
                result.append(node)
            if node in done:
                continue
            visiting.add(node)
            path.append(node)
            stack.append(iter(edges.get(node, ())))

        return result
