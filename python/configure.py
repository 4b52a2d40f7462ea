#!/usr/bin/env python3
"""Select the build units of a test suite from capability flags."""

import argparse
import json
import logging
import sys
from pathlib import Path

from capabilities import flags_from_env, merge_flags, parse_flag_assignment
from dependency import DependencyUnresolved, InTreeLocator, PackageLocator, split_cmake_list
from suite_configurator import SuiteConfigurator, write_manifest


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Select which test-suite subprojects take part in a build',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                       # unconditional units only
  %(prog)s -D hdf5Enabled=ON -D multiNodeNetworkingEnabled
  %(prog)s --from-env --prefix /opt/legion -o units.json
  %(prog)s --source-dir ../runtime --format json
        """
    )
    parser.add_argument('suite', nargs='?', default='test', help='Suite to configure (default: test)')
    parser.add_argument('-D', dest='defines', action='append', default=[], metavar='NAME[=VALUE]',
                        help='Set a capability flag; VALUE uses CMake truth rules, default ON')
    parser.add_argument('--from-env', action='store_true',
                        help='Seed flags from Legion_USE_HDF5, Legion_USE_Python, Legion_NETWORKS')
    parser.add_argument('--prefix', action='append', default=[], help='Extra package search root')
    parser.add_argument('--source-dir', help='Use an in-tree runtime at this path instead of searching')
    parser.add_argument('--warning-flags',
                        help='Warning options exported by the in-tree runtime, as a CMake list (needs --source-dir)')
    parser.add_argument('--suites-dir', help='Directory of <suite>/build_config.py files')
    parser.add_argument('--format', choices=['text', 'json'], default='text', help='Output format')
    parser.add_argument('-o', '--output', help='Write the JSON manifest to this file')
    parser.add_argument('--list', action='store_true', help='List available suites and exit')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    args = parser.parse_args(argv)
    if args.warning_flags is not None and not args.source_dir:
        parser.error('--warning-flags requires --source-dir')

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        cli_flags = dict(parse_flag_assignment(d) for d in args.defines)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    flags = merge_flags(flags_from_env() if args.from_env else None, cli_flags)

    if args.source_dir:
        locator = InTreeLocator(args.source_dir, split_cmake_list(args.warning_flags or ''))
    else:
        locator = PackageLocator(prefixes=args.prefix)

    suites_dir = Path(args.suites_dir) if args.suites_dir else None
    configurator = SuiteConfigurator(suites_dir=suites_dir, locator=locator)

    if args.list:
        for name in configurator.list_suites():
            print(name)
        return 0

    try:
        records = configurator.configure(args.suite, flags)
    except DependencyUnresolved as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        try:
            write_manifest(records, args.output)
        except OSError as e:
            print(f"Error: Cannot write manifest {args.output}: {e}", file=sys.stderr)
            return 1

    if args.format == 'json':
        print(json.dumps({"units": [r.to_dict() for r in records]}, indent=2))
    else:
        for record in records:
            print(record.name)

    return 0


if __name__ == '__main__':
    sys.exit(main())
