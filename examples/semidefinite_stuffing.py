"""
Semidefinite stuffing example.

Builds a small model with:
- A 2x2 positive semidefinite matrix variable
- A nonnegative vector tied to it through a Kronecker product
- A fixed parameter that is later freed

and prints the side constraints the conic-form compiler collects, then
scatters a hand-picked solution back onto the variables.
"""

import numpy as np
from conic_dcp import (
    Context, Semidefinite, Sign, UniqueConicForms, Variable, conic_form, kron,
)


def main():
    print("=" * 60)
    print("CONIC FORM STUFFING")
    print("=" * 60)

    ctx = Context('example')

    X = Semidefinite(2, context=ctx)
    t = Variable(2, Sign.POSITIVE, context=ctx)
    scale = Variable(context=ctx)
    scale.fix(3.0)

    constraints = [
        kron(np.ones((2, 1)), t) <= 1,
        X >> np.eye(2),
        kron(np.array([[1.0, -1.0]]), scale) == np.array([[3.0, -3.0]]),
    ]

    cache = UniqueConicForms()
    for constraint in constraints:
        constraint.conic_form(cache)
    conic_form(X, cache)

    print(f"\nCompiled nodes: {len(cache)}")
    print(f"Side constraints: {len(cache.constraint_list)}")
    for cc in cache.constraint_list:
        print(f"  {cc.cone:<8} rows={cc.size:<3} variables={cc.objective.variable_ids()}")

    var_ids = []
    for cc in cache.constraint_list:
        var_ids.extend(cc.objective.variable_ids())
    offsets = ctx.variable_offsets(var_ids)
    print(f"\nSolution layout: {offsets}")

    # Stand-in for a solver result
    solution = np.zeros(sum(width for _, width in offsets.values()))
    start, width = offsets[t.id_hash]
    solution[start:start + width] = [0.25, 0.75]
    start, width = offsets[X.id_hash]
    solution[start:start + width] = np.eye(2).ravel(order='F') * 2.0

    ctx.load_solution(solution, offsets)
    print(f"\nt = {t.value.ravel()}")
    print(f"X =\n{X.value}")

    scale.free()
    print(f"\nscale freed, vexity now {scale.vexity.value}; value kept at {scale.value}")


if __name__ == '__main__':
    main()
