#!/usr/bin/env python3
"""
Demo script for fragment mining, usefulness scoring and compatibility merging.

Builds two small programs from the sample component catalog, mines the first
one for fragments, scores them against the second, then splices a fragment
of the first into the second.
"""

import argparse
import logging
import random
import time

from settings import SETTINGS, load_settings
from synthesis_task import load_task
from synthesis_result import SearchStats, SynthesisResult
from model.ast_types import OperatorType
from model.catalog import ComponentCatalog
from model.expressions import Func, Op, Var
from model.fragments import FragmentLibrary
from model.function_data import Kind
from model.program import Program
from model.statements import AngelicCondition, ForEachLoop, ForLoop, VarAssignment
from utils.program_utils import angelic_count, compute_usefulness, merge_compatible, reset_indents, size
from utils.time_logger import TIME_LOGGER

log = logging.getLogger(__name__)


def build_sum_array() -> Program:
    """int r = 0; for (int x : arr) { r = r + x; } return r;"""
    program = Program("sumArray", "int", {"arr": "int[]"})
    program.add_local_var("r", "int")
    program.add_elem_var("x", "int")
    update = VarAssignment(Var("r", "int"), Op(OperatorType.ADD, Var("r", "int"), Var("x", "int")))
    program.add_statement(ForEachLoop("x", "int", Var("arr", "int[]"), [update]))
    program.set_return_val(Var("r", "int"))
    reset_indents(program)
    return program


def build_max_array(catalog: ComponentCatalog) -> Program:
    """best = Math.max(best, nums[i]) in a counting loop with an angelic bound."""
    math_max = catalog.find("java.lang.Math", "max")[0]
    arr_get = next(c for c in catalog if c.kind == Kind.ARR_GET)
    arr_len = next(c for c in catalog if c.kind == Kind.ARR_LEN)

    program = Program("maxArray", "int", {"nums": "int[]"})
    program.add_local_var("best", "int")
    program.add_loop_var("i")
    elem = Func([Var("nums", "int[]"), Var("i", "int")], None, arr_get)
    update = VarAssignment(Var("best", "int"), Func([Var("best", "int"), elem], None, math_max))
    bound = Op(OperatorType.LT, Var("i", "int"), Func([Var("nums", "int[]")], None, arr_len))
    program.add_statement(ForLoop("i", AngelicCondition(remembered=bound), [update]))
    program.set_return_val(Var("best", "int"))
    reset_indents(program)
    return program


def main():
    parser = argparse.ArgumentParser(description="Fragment usefulness demo")
    parser.add_argument("--catalog", default="config/components.yaml")
    parser.add_argument("--settings", default="config/settings.yaml")
    parser.add_argument("--task", default="config/task.yaml")
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    load_settings(args.settings)
    task = load_task(args.task)
    rng = random.Random(args.seed)

    TIME_LOGGER.start("Total")
    start = time.time()

    print("🔧 Fragment Usefulness Demo")
    print("=" * 50)

    # 1. Load the component catalog
    catalog = ComponentCatalog.from_yaml(args.catalog)
    print(f"📝 Loaded {len(catalog)} components ({catalog.num_invalid} skipped)")
    for component in catalog:
        print(f"   {component.encoding:>3}  {component.comparison_key}")

    # 2. Mine a known-good program
    known = build_sum_array()
    library = FragmentLibrary()
    library.remember(known)
    print(f"\n📚 Mined {len(library)} fragments from {known.name} (size {size(known)}):")
    print(known.to_java())

    # 3. Score the fragments against a new program
    target = build_max_array(catalog)
    print(f"🎯 Target program (size {size(target)}, {angelic_count(target)} angelic):")
    print(target.to_java())
    for fragment in library.all_fragments():
        print(f"   {compute_usefulness(fragment, target):.2f}  {fragment.to_java().strip()}")
    print(f"   mean usefulness: {library.mean_usefulness(target):.3f}")

    # 4. Splice the loop of the known program into the target
    fragment = known.statements[0].clone()
    rename_map = {}
    merge_compatible(fragment, rename_map, target, rng)
    target.add_statement(fragment)
    reset_indents(target)
    print(f"\n🧩 Merged loop with renames {rename_map}:")
    print(target.to_java())

    TIME_LOGGER.stop("Total")
    result = SynthesisResult.build(task, target, time.time() - start, library, SearchStats(num_programs_gen=1, num_programs_run=1))
    result.print()
    if SETTINGS.log_timing:
        TIME_LOGGER.print_log()


if __name__ == "__main__":
    main()
