"""
Compile arithmetic formulas into process graphs.

The enhanced vegetation index is written once as a formula and compiled
into a reducer over the band dimension. Run with::

    python examples/formula_example.py
"""

from demo_catalog import demo_catalog
from procgraph import Formula, FormulaSyntaxError, ProcessBuilder

EVI = "2.5 * (($B08 - $B04) / (1 + $B08 + 6 * $B04 + -7.5 * $B02))"


def build_evi() -> ProcessBuilder:
    builder = ProcessBuilder(demo_catalog(), id="evi")
    cube = builder.load_collection(
        "SENTINEL2", {"west": 16.1, "east": 16.6}, ["2018-01-01", "2018-02-01"], ["B02", "B04", "B08"]
    )
    cube = builder.reduce_dimension(cube, Formula(EVI), "bands")
    cube = builder.reduce_dimension(cube, lambda data, builder: builder.mean(data), "t")
    builder.set_result(builder.save_result(cube, "PNG"))
    return builder


def main() -> None:
    builder = build_evi()
    print(builder.to_json(indent=2))

    scratch = ProcessBuilder(demo_catalog())
    scratch.compile_formula("(#gain * x + 1) ^ 2")
    print(scratch.to_json(indent=2))

    try:
        scratch.compile_formula("2 + * 3")
    except FormulaSyntaxError as exc:
        print(f"rejected: {exc}")


if __name__ == "__main__":
    main()
