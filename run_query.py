#!/usr/bin/env python3
"""Command line front end for querying epidata sources."""

import argparse
import json
import sys
from typing import Any

import pandas as pd

from core.container import Container
from core.config import Config
from core.errors import EpidataError
from query.filters import FilterKind, FilterList
from sources import EpidataRequest, get_registry

# request parameter -> kind of its wire-format filter list
FILTER_PARAMS = {
    'epiweeks': FilterKind.EPIWEEK,
    'dates': FilterKind.DATE,
    'regions': FilterKind.STRING,
    'locations': FilterKind.STRING,
    'names': FilterKind.STRING,
    'issues': FilterKind.EPIWEEK,
    'hours': FilterKind.INTEGER,
    'articles': FilterKind.STRING,
}


def build_request(args: argparse.Namespace) -> EpidataRequest:
    """Parse wire-format arguments into a typed request."""
    filters = {
        name: FilterList.parse(getattr(args, name), kind)
        for name, kind in FILTER_PARAMS.items()
        if getattr(args, name) is not None
    }
    credentials = []
    for value in args.auth or []:
        credentials.extend(token for token in value.split(',') if token)

    return EpidataRequest(
        source=args.source,
        location=args.location,
        lag=args.lag,
        credentials=tuple(credentials),
        query=args.query,
        language=args.language,
        system=args.system,
        epiweek=args.epiweek,
        **filters,
    )


def run_request(container: Container, request: EpidataRequest) -> dict[str, Any]:
    """Run a request and wrap the outcome in an Epidata response envelope."""
    try:
        source = get_registry().create_source(request.source, container)
        rows = source.run(request)
    except EpidataError as e:
        return {'result': -1, 'message': str(e)}

    if not rows:
        return {'result': -2, 'message': 'no results'}
    return {'result': 1, 'message': 'success', 'epidata': rows}


def list_sources(container: Container) -> None:
    """List all available sources and their status."""
    registry = get_registry()
    config = container.get_config()

    print("\nAvailable Data Sources:")
    print("-" * 50)

    for name, source_class in registry.get_all().items():
        try:
            source_config = config.get_source_config(name)
            enabled = source_config.get('enabled', False)
            status = "enabled" if enabled else "disabled"
            desc = source_config.get('description', source_class.description)
        except KeyError:
            status = "not configured"
            desc = source_class.description

        required = ', '.join(source_class.required) or 'none'
        print(f"  {name}: {desc}")
        print(f"    Status: {status}")
        print(f"    Required: {required}")
        print()


def write_response(response: dict[str, Any], output_format: str) -> None:
    if output_format == 'csv' and response.get('epidata'):
        pd.DataFrame(response['epidata']).to_csv(sys.stdout, index=False)
    else:
        json.dump(response, sys.stdout, indent=2)
        print()


def main():
    parser = argparse.ArgumentParser(
        description="Query epidemiological data sources"
    )
    parser.add_argument('--source', '-s', help="Data source to query")
    parser.add_argument('--list', '-l', action='store_true', help="List available sources")
    parser.add_argument('--config', '-c', help="Path to configuration file")
    parser.add_argument('--format', '-f', choices=['json', 'csv'], default='json',
                        help="Output format (default: json)")

    filters = parser.add_argument_group('filters', "Comma separated values and ranges, e.g. 201440-201510,201520")
    for name in FILTER_PARAMS:
        filters.add_argument(f'--{name}')
    filters.add_argument('--location', help="Single published location (norostat)")
    filters.add_argument('--lag', type=int, help="Weeks between epiweek and issue")
    filters.add_argument('--query', help="Search query or topic (ght)")
    filters.add_argument('--language', help="Article language (wiki)")
    filters.add_argument('--system', help="Forecasting system (delphi)")
    filters.add_argument('--epiweek', type=int, help="Forecast epiweek (delphi)")
    parser.add_argument('--auth', '-a', action='append',
                        help="Access token; may be repeated")

    args = parser.parse_args()

    # Initialize container
    config = Config(args.config) if args.config else Config()
    container = Container(config)

    if args.list:
        list_sources(container)
        return

    try:
        request = build_request(args)
    except EpidataError as e:
        response = {'result': -1, 'message': str(e)}
    else:
        response = run_request(container, request)

    write_response(response, args.format)
    if response['result'] == -1:
        sys.exit(1)


if __name__ == "__main__":
    main()
