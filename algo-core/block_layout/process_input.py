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
import sys
from pathlib import Path

import pandas as pd

from .options import default_options, json_option_names
from .read_input import get_project_root

week_days = ["Mo", "Tu", "We", "Th", "Fr", "Sa", "Su"]


def hr24_to_int(time):
    """Convert `13:00` style time to minutes starting from `00:00`."""
    hour, minute = time.split(":")
    return int(hour) * 60 + int(minute)


def to_24hr(time):
    """Convert `1:00PM` style time to `13:00` style time."""
    time = time.strip().upper()
    suffix = time[-2:]
    hour, minute = time[:-2].strip().split(":")
    hour = int(hour) % 12
    if suffix == "PM":
        hour += 12
    return f"{hour}:{minute}"


def hr12_to_int(time):
    """Convert `1:00AM` style time to minutes starting from `00:00`."""
    return hr24_to_int(to_24hr(time))


def parse_time(time):
    """Accept both `13:00` and `1:00PM` style times."""
    if time.strip().upper().endswith(("AM", "PM")):
        return hr12_to_int(time)
    return hr24_to_int(time.strip())


def split_days(days):
    """Split `MoWeFr` into ['Mo', 'We', 'Fr']."""
    return [days[i : i + 2] for i in range(0, len(days), 2)]


def setup_events_dataframe(events):
    """Set up dataframe with one row per event per meeting day."""
    rows = []
    for event in events:
        start_min = parse_time(event["start"])
        end_min = parse_time(event["end"])
        if end_min <= start_min:
            print(
                f"ERROR: Event {event['title']} ends at {event['end']}, "
                f"which is not after its start at {event['start']}!"
            )
            sys.exit(1)

        for day in split_days(event["days"]):
            rows.append(
                {
                    "title": event["title"],
                    "day": day,
                    "start": event["start"],
                    "end": event["end"],
                    "start_min": start_min,
                    "end_min": end_min,
                }
            )

    df_events = pd.DataFrame(
        rows,
        columns=["title", "day", "start", "end", "start_min", "end_min"],
    )
    # Keep input order within each day:
    df_events["day"] = pd.Categorical(
        df_events["day"], categories=week_days, ordered=True
    )
    df_events = df_events.sort_values("day", kind="stable").reset_index(
        drop=True
    )
    return df_events


def process_input_data(input_json, output_folder=None):
    """Convert json input to convenient Python variables."""
    options = input_json["options"]
    config = {}
    config["model_name"] = options["modelName"]
    config["layout_options"] = dict(default_options)
    for json_name, name in json_option_names.items():
        if json_name in options:
            config["layout_options"][name] = int(options[json_name])

    if output_folder is None:
        config["output_folder"] = (
            get_project_root() / "logs" / config["model_name"]
        )
    else:
        config["output_folder"] = Path(output_folder)

    df_events = setup_events_dataframe(input_json["events"])
    print(
        f"\n{len(input_json['events'])} events, "
        f"{len(df_events)} blocks over "
        f"{df_events['day'].nunique()} days."
    )
    return [df_events, config]
