#!/usr/bin/env python3
# Copyright 2025 R5
# This file is part of the R5 Core library.
#
# This software is provided "as is", without warranty of any kind,
# express or implied, including but not limited to the warranties
# of merchantability, fitness for a particular purpose and
# noninfringement. In no event shall the authors or copyright
# holders be liable for any claim, damages, or other liability,
# whether in an action of contract, tort or otherwise, arising
# from, out of or in connection with the software or the use or
# other dealings in the software.
#
# Author: ZNX

import argparse
import os
import sys
import subprocess
import shutil

def handle_error(msg):
    print(f"Error: {msg}")
    sys.exit(1)

def clean_build_dirs():
    print("Cleaning previous build output...")
    for path in ("build", "dist", "autotx.spec"):
        if os.path.isdir(path):
            shutil.rmtree(path)
        elif os.path.exists(path):
            os.remove(path)

def build_autotx(icon=None):
    print("Building AutoTX executable...")
    # Prepare the pyinstaller command.
    cmd = [
        sys.executable,
        '-m',
        'PyInstaller',
        '--onefile',
        '--name', 'autotx',
        '--paths', os.getcwd(),
    ]
    if icon:
        cmd.extend(['--icon', icon])
    cmd.append(os.path.join('autotx', '__main__.py'))
    print("Executing:", ' '.join(cmd))
    try:
        subprocess.check_call(cmd)
    except subprocess.CalledProcessError as e:
        handle_error(f"AutoTX build failed: {e}")
    print("AutoTX build completed successfully.")

def move_binary(destination_dir):
    """Moves dist/autotx(.exe) into destination_dir."""
    binary_name = "autotx.exe" if sys.platform.startswith("win") else "autotx"
    source = os.path.join("dist", binary_name)
    os.makedirs(destination_dir, exist_ok=True)
    dest = os.path.join(destination_dir, binary_name)
    print(f"Moving {binary_name} to {destination_dir}...")
    try:
        shutil.move(source, dest)
    except Exception as e:
        handle_error(f"Moving binary failed: {e}")
    print(f"Binary available at {dest}")

def parse_args():
    parser = argparse.ArgumentParser(description="Build the R5 AutoTX one-file executable")
    parser.add_argument("--clean", action="store_true", help="Remove previous build output first")
    parser.add_argument("--icon", help="Optional icon file for the executable")
    parser.add_argument("--output", default="bin", help="Directory for the final binary (default: bin)")
    return parser.parse_args()

def main():
    args = parse_args()
    if args.clean:
        clean_build_dirs()
    build_autotx(args.icon)
    move_binary(args.output)

if __name__ == "__main__":
    main()
