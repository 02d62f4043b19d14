"""
Build a small process graph with a callback and print its JSON.

Run with::

    python examples/getting_started.py
"""

import logging

from demo_catalog import demo_catalog
from procgraph import Parameter, ProcessBuilder


def build_minimum_composite() -> ProcessBuilder:
    builder = ProcessBuilder(demo_catalog(), id="minimum_composite")
    builder.set_metadata(summary="Minimum over time of a collection")

    extent = {"west": 16.1, "east": 16.6, "south": 48.1, "north": 48.6}
    cube = builder.load_collection(
        Parameter("collection", "string", "Collection to load"),
        extent,
        ["2018-01-01", "2018-02-01"],
    )
    cube = builder.reduce_dimension(cube, lambda data, builder: builder.min(data), "t")
    cube = builder.apply(cube, lambda x, builder: builder.absolute(x))
    builder.set_result(builder.save_result(cube, "GTiff").description("Store as GeoTIFF"))
    return builder


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    builder = build_minimum_composite()
    print(builder.to_json(indent=2))
    for diagnostic in builder.diagnostics:
        print(f"warning[{diagnostic.code}]: {diagnostic.message}")


if __name__ == "__main__":
    main()
