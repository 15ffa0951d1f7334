# main_runner.py
import os
import sys
import importlib.util
import questionary
from config import MODULE_PATH


def discover_modules(module_path=MODULE_PATH):
    """Task modules are the plain .py files in MODULE_PATH (no dunder files)."""
    if not os.path.isdir(module_path):
        return []
    return sorted(
        f for f in os.listdir(module_path)
        if f.endswith('.py') and not f.startswith('__')
    )


def load_and_run_module(module_path):
    """
    Load a task module from the given path and run its main function.
    """
    module_name = os.path.splitext(os.path.basename(module_path))[0]

    spec = importlib.util.spec_from_file_location(module_name, module_path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    if hasattr(module, 'main'):
        return module.main()
    print(f"No main() function found in {module_name}. Skipping...")


def run_selected_module():
    if not os.path.isdir(MODULE_PATH):
        print(f"The path '{MODULE_PATH}' is not a valid directory.")
        return

    python_files = discover_modules(MODULE_PATH)
    if not python_files:
        print("No Python modules found in the specified directory.")
        return

    choices = [
        questionary.Choice(title=f"{idx + 1}. {os.path.splitext(fname)[0]}", value=fname)
        for idx, fname in enumerate(python_files)
    ]
    selected_file = questionary.select("Select the task you want to run:", choices=choices).ask()
    if not selected_file:
        print("No module selected.")
        return

    module_path = os.path.join(MODULE_PATH, selected_file)
    try:
        load_and_run_module(module_path)
    except KeyboardInterrupt:
        print("\nInterrupted.")
    except Exception as e:
        print(f"Error running {module_path}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run_selected_module()
