from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .errors import ClientsmithError
from .generation import GenerationProfile, GenerationWarning, IndexModelsResolver, ModelIndex, ModelsResolver
from .generator import PackageSpec, generate_package
from .ir import build_ir
from .loader import load_mapping, load_openapi

logger = logging.getLogger("clientsmith")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="clientsmith",
        description="Generate a Python client from an OpenAPI document.",
    )
    parser.add_argument("document", type=Path, help="Path to an OpenAPI or Swagger document (JSON/YAML)")
    parser.add_argument("-n", "--package-name", required=True, help="Generated package name")
    parser.add_argument("-o", "--output-dir", type=Path, default=Path("."), help="Output directory")
    parser.add_argument(
        "--models-index",
        type=Path,
        default=None,
        help="JSON/YAML file mapping schema names to {typeName, importLocation}",
    )
    parser.add_argument("--python-version", default="3.10", help="Target Python version (e.g. 3.10)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    def report(warning: GenerationWarning) -> None:
        logger.warning("%s", warning)

    try:
        resolver: ModelsResolver | None = None
        if args.models_index is not None:
            resolver = IndexModelsResolver(ModelIndex.build(load_mapping(args.models_index)))
        document = load_openapi(args.document)
        ir = build_ir(document)
        profile = GenerationProfile.from_version(args.python_version)
        package = PackageSpec(package_name=args.package_name, output_dir=args.output_dir)
        result = generate_package(package, ir, profile, resolver=resolver, sink=report)
    except ClientsmithError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except FileNotFoundError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    logger.info(
        "Generated %d methods in %s (%d warnings)",
        len(result.surface.methods),
        result.package_dir,
        len(result.warnings),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
