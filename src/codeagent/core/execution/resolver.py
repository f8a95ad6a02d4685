"""Dependency ordering for Operations.

Operations form a graph keyed on their target; a move also produces its
destination. Cycles are found with a depth-first search (white/gray/black
colouring), then Kahn's algorithm produces the order. The ready set is a
heap so that, among operations whose dependencies are met, writes come
before edits, edits before the rest, then lower priority, then declaration
order.

Dependencies naming a target that no operation in the list produces are
external: they are left for the engine to check against the file system.
"""

import heapq
import logging
from dataclasses import dataclass, field

from codeagent.core.exceptions import CyclicDependencyError, IntentError
from codeagent.intent.types import IntentKind, Operation

logger = logging.getLogger(__name__)

_INTENT_RANK: dict[IntentKind, int] = {
    IntentKind.WRITE: 0,
    IntentKind.EDIT: 1,
}
_OTHER_RANK = 2


@dataclass(frozen=True)
class Resolution:
    """Result of ordering a list of Operations.

    Attributes:
        operations: Execution order (empty when errors is non-empty).
        errors: Cycle descriptions.
        cycle_targets: Targets that take part in a cycle.

    """

    operations: tuple[Operation, ...] = ()
    errors: tuple[str, ...] = ()
    cycle_targets: frozenset[str] = field(default_factory=frozenset)

    @property
    def ok(self) -> bool:
        return not self.errors


def produced_paths(operation: Operation) -> set[str]:
    """Paths an operation makes available: its target, plus a move's destination."""
    if operation.intent is IntentKind.MOVE:
        try:
            return {operation.target, operation.move_paths[1]}
        except IntentError:
            return {operation.target}
    return {operation.target}


def _format_cycle(cycle: list[str]) -> str:
    # cycle is closed: first node repeated at the end
    nodes = cycle[:-1]
    if len(nodes) == 2:
        return f"Circular dependency detected between {nodes[0]} and {nodes[1]}"
    return "Circular dependency detected: " + " -> ".join(cycle)


def _find_cycles(graph: dict[str, list[str]]) -> list[list[str]]:
    """Return closed cycle paths in the target graph."""
    white, gray, black = 0, 1, 2
    color = dict.fromkeys(graph, white)
    cycles: list[list[str]] = []
    seen: set[frozenset[str]] = set()

    def dfs(node: str, path: list[str]) -> None:
        color[node] = gray
        path.append(node)
        for neighbor in graph[node]:
            if color[neighbor] == gray:
                cycle = path[path.index(neighbor):] + [neighbor]
                key = frozenset(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(cycle)
            elif color[neighbor] == white:
                dfs(neighbor, path)
        path.pop()
        color[node] = black

    for node in graph:
        if color[node] == white:
            dfs(node, [])
    return cycles


def resolve_operations(operations: list[Operation] | tuple[Operation, ...]) -> Resolution:
    """Order operations so every dependency is produced before it is needed.

    Args:
        operations: Operations in declaration order.

    Returns:
        Resolution with the ordered operations, or with cycle errors and no
        order. Never raises for cyclic input.

    Examples:
        >>> css = Operation(IntentKind.WRITE, "site/styles.css", "create")
        >>> html = Operation(IntentKind.EDIT, "site/index.html", "link",
        ...                  dependencies=frozenset({"site/styles.css"}))
        >>> [op.target for op in resolve_operations([html, css]).operations]
        ['site/styles.css', 'site/index.html']

    """
    ops = list(operations)
    producers: dict[str, list[int]] = {}
    for index, op in enumerate(ops):
        for path in sorted(produced_paths(op)):
            producers.setdefault(path, []).append(index)

    # Edges: producer target -> dependent target
    graph: dict[str, list[str]] = {op.target: [] for op in ops}
    for index, op in enumerate(ops):
        for dep in sorted(op.dependencies):
            if dep == op.target:
                logger.debug("Ignoring self-dependency on %s", dep)
                continue
            for producer in producers.get(dep, []):
                source = ops[producer].target
                if producer != index and op.target not in graph[source]:
                    graph[source].append(op.target)

    cycles = _find_cycles(graph)
    if cycles:
        errors = tuple(_format_cycle(cycle) for cycle in cycles)
        cycle_targets = frozenset(target for cycle in cycles for target in cycle)
        for error in errors:
            logger.warning(error)
        return Resolution(errors=errors, cycle_targets=cycle_targets)

    in_degree = [0] * len(ops)
    dependents: dict[int, list[int]] = {i: [] for i in range(len(ops))}
    for index, op in enumerate(ops):
        for dep in op.dependencies:
            if dep == op.target or dep not in producers:
                continue
            for producer in producers[dep]:
                if producer == index:
                    continue
                dependents[producer].append(index)
                in_degree[index] += 1

    def sort_key(index: int) -> tuple[int, int, int]:
        op = ops[index]
        return (_INTENT_RANK.get(op.intent, _OTHER_RANK), op.priority, index)

    ready = [sort_key(i) for i in range(len(ops)) if in_degree[i] == 0]
    heapq.heapify(ready)
    ordered: list[Operation] = []
    while ready:
        *_, index = heapq.heappop(ready)
        ordered.append(ops[index])
        for dependent in dependents[index]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(ready, sort_key(dependent))

    return Resolution(operations=tuple(ordered))


def resolve_or_raise(operations: list[Operation] | tuple[Operation, ...]) -> tuple[Operation, ...]:
    """Like resolve_operations but raises on cycles.

    Raises:
        CyclicDependencyError: If the operations contain a dependency cycle.

    """
    resolution = resolve_operations(operations)
    if not resolution.ok:
        raise CyclicDependencyError("; ".join(resolution.errors), cycle=sorted(resolution.cycle_targets))
    return resolution.operations
