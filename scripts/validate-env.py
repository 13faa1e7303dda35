#!/usr/bin/env python3
"""
Environment Configuration Validator for the Block Tutor Relay

Checks that env files define the inference credential and listening port
and reports whether the credential is loaded, without printing its value.

Usage:
    python scripts/validate-env.py                 # checks ./.env and ./.env.prod
    python scripts/validate-env.py path/to/.env    # checks the given files
"""

import argparse
import sys
from pathlib import Path


PROVIDERS = {"openai", "azure_openai"}


def read_env_file(env_file_path):
    """Parse KEY=VALUE lines, ignoring blanks and comments."""
    env_vars = {}
    with open(env_file_path, "r") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                env_vars[key.strip()] = value.strip().strip("'\"")
    return env_vars


def validate_env_file(env_file_path):
    """Validate environment file exists and contains required variables."""
    warnings = []
    errors = []

    if not env_file_path.exists():
        errors.append(f"Environment file not found: {env_file_path}")
        return errors, warnings

    env_vars = read_env_file(env_file_path)

    provider = env_vars.get("LLM_PROVIDER", "openai").lower()
    if provider not in PROVIDERS:
        errors.append(f"LLM_PROVIDER must be one of: {', '.join(sorted(PROVIDERS))}")
    elif provider == "azure_openai":
        for var in (
            "AZURE_OPENAI_ENDPOINT",
            "AZURE_OPENAI_API_KEY",
            "AZURE_OPENAI_API_VERSION",
        ):
            if not env_vars.get(var):
                errors.append(f"Missing required environment variable: {var}")
    elif not env_vars.get("OPENAI_API_KEY"):
        errors.append("Missing required environment variable: OPENAI_API_KEY")

    port = env_vars.get("PORT")
    if port is None:
        warnings.append("PORT not set; the server will listen on 5000")
    elif not port.isdigit() or not 0 < int(port) < 65536:
        errors.append(f"PORT must be a number between 1 and 65535, got '{port}'")

    if "CORS_ORIGINS" in env_vars:
        origins = env_vars["CORS_ORIGINS"]
        if env_vars.get("ENVIRONMENT") == "production" and "localhost" in origins:
            warnings.append("CORS_ORIGINS contains localhost in production environment")

    return errors, warnings


def credential_status(env_file_path):
    if not env_file_path.exists():
        return "Missing"
    env_vars = read_env_file(env_file_path)
    if env_vars.get("LLM_PROVIDER", "openai").lower() == "azure_openai":
        return "Loaded" if env_vars.get("AZURE_OPENAI_API_KEY") else "Missing"
    return "Loaded" if env_vars.get("OPENAI_API_KEY") else "Missing"


def main(argv=None):
    """Main validation function."""
    parser = argparse.ArgumentParser(description="Validate relay env files")
    parser.add_argument("env_files", nargs="*", type=Path)
    args = parser.parse_args(argv)

    env_files = args.env_files or [Path(".env"), Path(".env.prod")]

    print("Validating Block Tutor Relay environment configuration...\n")

    total_errors = 0
    total_warnings = 0

    for env_file in env_files:
        print(f"Checking {env_file}")
        print("-" * 50)
        print(f"OpenAI Key: {credential_status(env_file)}")

        errors, warnings = validate_env_file(env_file)

        if errors:
            print("ERRORS:")
            for error in errors:
                print(f"   - {error}")
            total_errors += len(errors)

        if warnings:
            print("WARNINGS:")
            for warning in warnings:
                print(f"   - {warning}")
            total_warnings += len(warnings)

        if not errors and not warnings:
            print("Configuration looks good!")

        print()

    print("SUMMARY")
    print("-" * 20)
    print(f"Total Errors: {total_errors}")
    print(f"Total Warnings: {total_warnings}")

    return 1 if total_errors > 0 else 0


if __name__ == "__main__":
    sys.exit(main())
