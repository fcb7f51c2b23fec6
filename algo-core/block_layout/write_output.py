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
import json
import sys
from pathlib import Path

import jsonschema

from .read_input import get_project_root

output_schema_filename = "block-layout-output.schema.json"
output_filename = "block-layout-output.json"


def build_output_json(df_events, day_results):
    output_json = []
    for result in day_results:
        df_day = df_events[df_events["day"] == result["day"]]
        blocks = []
        for row in df_day.itertuples():
            blocks.append(
                {
                    "title": row.title,
                    "start": row.start,
                    "end": row.end,
                    "left": float(row.left),
                    "width": float(row.width),
                }
            )
        output_json.append(
            {
                "day": str(result["day"]),
                "rooms": int(result["rooms"]),
                "sum": float(result["sum"]),
                "sumSq": float(result["sumSq"]),
                "blocks": blocks,
            }
        )
    return output_json


def write_output_files(df_events, day_results, config):
    """Print final layout, validate output JSON, and write to file."""
    output_json = build_output_json(df_events, day_results)
    for day in output_json:
        print(f"\n{day['day']} layout:")
        for block in day["blocks"]:
            print(
                f"{block['start']}-{block['end']} {block['title']}: "
                f"left {block['left']:.3f}, width {block['width']:.3f}"
            )

    with open(
        Path(get_project_root() / "lib/schemas/", output_schema_filename)
    ) as schema_file:
        output_json_schema = json.load(schema_file)
    try:
        jsonschema.validate(output_json, output_json_schema)
    except jsonschema.exceptions.ValidationError as err:
        print("Output JSON validation error", err)
        sys.exit(1)

    print("\nSuccessfully validated JSON output.")

    output_folder = Path(config["output_folder"])
    output_folder.mkdir(parents=True, exist_ok=True)
    with open(Path(output_folder, output_filename), "w") as outfile:
        outfile.write(json.dumps(output_json, indent=4))
    print(f"Layout written to {Path(output_folder, output_filename)}")
    return output_json
