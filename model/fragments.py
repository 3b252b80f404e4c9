"""Fragment corpus harvested from known-good programs."""

from collections import Counter, defaultdict
from typing import Dict, List, Union

from .expressions import Expression
from .program import Program
from .statements import Statement
from utils.program_utils import fragments, mean_usefulness

Fragment = Union[Expression, Statement]


class FragmentLibrary:
    """
    Fragments mined from remembered programs.

    programs: remembered programs (private clones, deduplicated by encoding)
    expression_fragments: expression fragments keyed by their result type
    statement_fragments: statement fragments in harvest order
    Each distinct fragment is stored once; ``frequency`` counts how often it
    was harvested.
    """

    def __init__(self) -> None:
        self.programs: List[Program] = []
        self.expression_fragments: Dict[str, List[Expression]] = defaultdict(list)
        self.statement_fragments: List[Statement] = []
        self._program_keys = set()
        self._counts: Counter = Counter()

    def remember(self, program: Program) -> bool:
        """Store a copy of ``program`` and harvest its fragments. Returns False for a duplicate."""
        key = program.encode()
        if key in self._program_keys:
            return False
        self._program_keys.add(key)
        copy = program.clone()
        self.programs.append(copy)

        statements, expressions = fragments(copy)
        for s in statements:
            if self._count(s):
                self.statement_fragments.append(s)
        for e in expressions:
            if self._count(e):
                self.expression_fragments[e.type].append(e)
        return True

    def _count(self, fragment: Fragment) -> bool:
        key = fragment.encode()
        is_new = key not in self._counts
        self._counts[key] += 1
        return is_new

    def frequency(self, fragment: Fragment) -> int:
        return self._counts.get(fragment.encode(), 0)

    def expressions_of_type(self, type_name: str) -> List[Expression]:
        return list(self.expression_fragments.get(type_name, []))

    def all_fragments(self) -> List[Fragment]:
        result: List[Fragment] = []
        for exprs in self.expression_fragments.values():
            result.extend(exprs)
        result.extend(self.statement_fragments)
        return result

    def mean_usefulness(self, program: Program) -> float:
        return mean_usefulness(self.all_fragments(), program)

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"FragmentLibrary({len(self.programs)} programs, {len(self)} fragments)"
