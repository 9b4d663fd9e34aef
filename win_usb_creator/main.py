"""Interactive command line entry point for building the installer USB."""

import argparse
import sys
from pathlib import Path

from win_usb_creator.config.settings import ProvisionConfig
from win_usb_creator.logging import LoggerFactory, setup_logging
from win_usb_creator.pipeline import Provisioner
from win_usb_creator.storage.disks import human_size, list_disks
from win_usb_creator.storage.exceptions import ProvisioningError
from win_usb_creator.storage.validation import resolve_source_image, resolve_target_device


CONFIRM_ANSWERS = ("y", "yes")

BANNER = (
    "Windows 11 Bootable USB Creator",
    "===============================",
    "Ensure wimlib is installed (`brew install wimlib`) and the USB is inserted.",
)


def is_confirmed(answer):
    return (answer or "").strip().lower() in CONFIRM_ANSWERS


def main(argv=None, input_func=input):
    parser = argparse.ArgumentParser(description="Windows bootable USB creator")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable verbose debug output")
    parser.add_argument("--trace", action="store_true", help="Enable trace output")
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for log files")
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug, trace=args.trace, log_dir=args.log_dir)
    log = LoggerFactory.for_system()

    for line in BANNER:
        print(line)

    try:
        config = ProvisionConfig.from_settings()
        provisioner = Provisioner(config)
        provisioner.preflight()

        source = resolve_source_image(
            input_func("Enter the full path to the Windows 11 ISO (e.g., ~/Downloads/Win11.iso): "),
            config.image_extension,
        )

        print("Listing available disks:")
        list_disks(timeout=config.command_timeout_seconds)
        device = resolve_target_device(
            input_func("Enter the USB device identifier (e.g., /dev/disk2): "),
            config.device_prefix,
        )

        answer = input_func(f"WARNING: This will erase all data on {device}. Continue? (y/N): ")
        if not is_confirmed(answer):
            print("Aborted.")
            log.info(f"Operator declined to erase {device}")
            return 0

        result = provisioner.provision(source, device)
    except ProvisioningError as error:
        log.error(f"Error: {error}")
        return 1
    except (EOFError, KeyboardInterrupt):
        print()
        log.error("Input cancelled")
        return 1

    if not result.succeeded:
        log.error(f"Provisioning stopped at stage {result.stage.value}")
        return 1
    if result.available_bytes is not None:
        log.info(f"USB free space before copy: {human_size(result.available_bytes)}")
    for warning in result.warnings:
        log.warning(f"Warning: {warning}")
    print("Success! The USB is now bootable with Windows 11.")
    print("Insert it into the target PC, set UEFI boot mode, and install.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
