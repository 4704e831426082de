#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from quantdash_app.config.loader import ConfigLoader
from quantdash_app.config.validation import ConfigValidator, ValidationError
from quantdash_app.errors import DataQualityError


def validate_asset_config(loader: ConfigLoader, asset_id: str) -> List[ValidationError]:
    """Validate merged configuration for a specific asset."""
    return ConfigValidator.validate_config(loader.merge_config(asset_id))


def main():
    """Main validation function."""
    print("🔍 Validating QuantDash configuration...")

    loader = ConfigLoader.create()
    assets = loader.list_assets() + ["UNKNOWN-ASSET"]  # Last one should use defaults

    all_valid = True

    for asset_id in assets:
        print(f"\n📊 Validating {asset_id}...")

        try:
            errors = validate_asset_config(loader, asset_id)
        except (DataQualityError, OSError, ValueError) as e:
            print(f"❌ Error validating {asset_id}: {e}")
            all_valid = False
            continue

        if errors:
            print(f"❌ Found {len(errors)} validation errors:")
            for error in errors:
                print(f"  • {error.field}: {error.message} (value: {error.value})")
            all_valid = False
        else:
            print(f"✅ {asset_id} configuration is valid")

    print("\n📋 Testing per-call overrides...")
    config = loader.merge_config("BTC", {"signal": {"band_window": 30}, "monte_carlo": {"num_paths": 500}})
    errors = ConfigValidator.validate_config(config)
    if errors:
        print("❌ Override validation failed:")
        for error in errors:
            print(f"  • {error.field}: {error.message}")
        all_valid = False
    else:
        print("✅ Override validation passed")

    if all_valid:
        print("\n🎉 All configurations are valid!")
        sys.exit(0)
    else:
        print("\n⚠️  Configuration validation failed.")
        sys.exit(1)


if __name__ == "__main__":
    main()
