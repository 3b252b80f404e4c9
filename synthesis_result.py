"""
Summary of one synthesis attempt, including how much the fragment corpus helped.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from settings import SETTINGS, simple_names
from synthesis_task import SynthesisTask
from model.fragments import FragmentLibrary
from model.program import Program
from utils.program_utils import size


@dataclass
class SearchStats:
    """Generation/run counters reported by the search loop"""
    num_programs_gen: int = 0
    num_programs_run: int = 0
    num_angelic_gen: int = 0
    num_angelic_run: int = 0
    num_non_angelic_gen: int = 0
    num_non_angelic_run: int = 0


def algorithm_label(mine_fragments: bool, use_angelic_conditions: bool) -> str:
    if mine_fragments:
        return "FrAngel" if use_angelic_conditions else "Fragments"
    return "Angelic" if use_angelic_conditions else "Baseline"


@dataclass
class SynthesisResult:
    name: str
    success: bool
    time: float
    program: str
    simple_program: str
    group: Optional[str] = None
    num_examples: int = 0
    num_components: int = 0
    program_size: int = 0
    sypet_mode: bool = False
    tags: List[str] = field(default_factory=list)
    alg: str = "Baseline"
    uncleaned_program: str = ""
    uncleaned_program_size: int = 0
    num_remembered_programs: int = 0
    num_fragments: int = 0
    # For each fragment, the largest fraction of its weight matching the program
    average_fragment_usefulness: float = 0.0
    stats: SearchStats = field(default_factory=SearchStats)

    @classmethod
    def build(
        cls,
        task: SynthesisTask,
        program: Optional[Program],
        elapsed: float,
        library: Optional[FragmentLibrary] = None,
        stats: Optional[SearchStats] = None,
        uncleaned_program: str = "",
        uncleaned_program_size: int = 0,
    ) -> "SynthesisResult":
        success = program is not None
        with simple_names(False):
            qualified = program.to_java() if success else ""
        with simple_names(True):
            simple = program.to_java() if success else ""

        num_remembered = 0
        num_fragments = 0
        usefulness = 0.0
        if SETTINGS.mine_fragments and library is not None:
            num_remembered = len(library.programs)
            num_fragments = len(library.all_fragments())
            usefulness = library.mean_usefulness(program) if success else 0.0

        return cls(
            name=task.name,
            success=success,
            time=elapsed,
            program=qualified,
            simple_program=simple,
            group=task.group,
            num_examples=task.num_examples,
            num_components=task.num_components,
            program_size=size(program) if success else 0,
            sypet_mode=SETTINGS.sypet_mode,
            tags=[t.value for t in task.tags],
            alg=algorithm_label(SETTINGS.mine_fragments, SETTINGS.use_angelic_conditions),
            uncleaned_program=uncleaned_program,
            uncleaned_program_size=uncleaned_program_size,
            num_remembered_programs=num_remembered,
            num_fragments=num_fragments,
            average_fragment_usefulness=usefulness,
            stats=stats if stats is not None else SearchStats(),
        )

    def _count_lines(self) -> List[str]:
        if SETTINGS.verbose <= 1:
            return []
        s = self.stats
        return [
            f"All programs:     generated {s.num_programs_gen}, ran {s.num_programs_run}",
            f"Only non-angelic: generated {s.num_non_angelic_gen}, ran {s.num_non_angelic_run}",
            f"Only angelic:     generated {s.num_angelic_gen}, ran {s.num_angelic_run}",
        ]

    def format(self) -> str:
        lines = [f"Name: {self.name}"]
        if self.group is not None:
            lines.append(f"Group: {self.group}")
        lines.append(f"Success: {self.success}")
        lines.append(f"Time: {self.time:.3f} sec")
        lines.append(f"# Examples: {self.num_examples}")
        lines.append(f"# Components: {self.num_components}")
        if self.success:
            lines.append(f"Program Size: {self.program_size}")
        lines.extend(self._count_lines())
        if self.success:
            lines.append(self.program.rstrip("\n"))
        return "\n".join(lines) + "\n"

    def print(self) -> None:
        print(self.format())
