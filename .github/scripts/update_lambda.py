#!/usr/bin/env python3
"""
Push the consent gateway code to its Lambda functions.

The gateway may be deployed as several functions (one per route, or one per
stage); LAMBDA_MAP points at a JSON object {label: functionArnOrName}.
Only labels listed in DEPLOY_TARGETS are updated; an empty DEPLOY_TARGETS
updates every function in the map.
"""
import fnmatch
import json
import os
import sys
import zipfile
from io import BytesIO
from typing import Dict, List

import boto3
from botocore.exceptions import ClientError

FUNCTION_ROOT = "consent_gateway"
EXCLUDE_PATTERNS = ("tests", "tests/*", "*/__pycache__/*", "__pycache__/*", "*.pyc", ".pytest_cache/*")


def is_excluded(arcname: str) -> bool:
    return any(fnmatch.fnmatch(arcname, pattern) for pattern in EXCLUDE_PATTERNS)


def build_package(dir_path: str) -> bytes:
    """Zip the function root so that its modules sit at the archive root."""
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for root, _, files in os.walk(dir_path):
            for fname in sorted(files):
                file_path = os.path.join(root, fname)
                arcname = os.path.relpath(file_path, dir_path).replace(os.sep, "/")
                if is_excluded(arcname):
                    continue
                zf.write(file_path, arcname)
    return buffer.getvalue()


def load_function_map(path: str) -> Dict[str, str]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must be a JSON object of {{label: functionArn}}")
    return {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str) and v}


def select_targets(mapping: Dict[str, str], requested: List[str]) -> Dict[str, str]:
    if not requested:
        return dict(mapping)
    return {label: mapping[label] for label in requested if label in mapping}


def main() -> None:
    map_path = os.getenv("LAMBDA_MAP", "lambda_map.json")
    region = os.getenv("AWS_REGION", "us-east-1")
    publish = os.getenv("PUBLISH_VERSION", "false").lower() == "true"
    requested = [t for t in os.getenv("DEPLOY_TARGETS", "").split() if t]

    try:
        mapping = load_function_map(map_path)
    except FileNotFoundError:
        print(f"Mapping file {map_path} not found. Create it with {{ 'label': 'functionArn' }} entries.")
        sys.exit(1)

    targets = select_targets(mapping, requested)
    missing = sorted(set(requested) - set(targets))
    for label in missing:
        print(f"Skipping {label}: no function mapping in {map_path}")
    if not targets:
        print("No functions to update.")
        return

    if not os.path.isdir(FUNCTION_ROOT):
        print(f"Function root {FUNCTION_ROOT}/ not found; run from the repository root.")
        sys.exit(1)
    code_bytes = build_package(FUNCTION_ROOT)
    print(f"Built {FUNCTION_ROOT} package ({len(code_bytes)} bytes)")

    lambda_client = boto3.Session(region_name=region).client("lambda")
    failures = 0
    for label, function_name in targets.items():
        try:
            resp = lambda_client.update_function_code(
                FunctionName=function_name, ZipFile=code_bytes, Publish=publish
            )
            print(f"Updated {label} ({function_name}). LastModified={resp.get('LastModified', 'unknown')}")
        except ClientError as e:
            failures += 1
            print(f"Failed updating {label} ({function_name}): {e}")

    if failures:
        sys.exit(1)
    print("Done.")


if __name__ == "__main__":
    main()
