"""
Copyright 2019-2025 Balena Ltd.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

   http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""
import argparse
import sys
import json
import jsonschema
from pathlib import Path

input_schema_filename = "block-layout-input.schema.json"


def get_project_root() -> Path:
    return Path(__file__).parent.parent.parent


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description="Lay out overlapping calendar blocks."
    )
    parser.add_argument(
        "-i", "--input", help="Block layout input JSON file path", required=True
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output folder (defaults to logs/<modelName>)",
        default=None,
    )
    return parser.parse_args(argv)


def validate_input_json(input_json):
    """Validate input against the schema, exiting on error."""
    path_to_schema = Path(
        get_project_root() / "lib/schemas/", input_schema_filename
    )
    with open(path_to_schema) as schema_file:
        input_json_schema = json.load(schema_file)
    try:
        jsonschema.validate(input_json, input_json_schema)
    except jsonschema.exceptions.ValidationError as err:
        print("Input JSON validation error", err)
        sys.exit(1)
    return input_json


def read_input_files(argv=None):
    """Read, validate and return json input and the requested output folder."""
    args = parse_arguments(argv)
    input_filename = args.input.strip()
    with open(input_filename) as input_file:
        input_json = validate_input_json(json.load(input_file))
    return [input_json, args.output]
