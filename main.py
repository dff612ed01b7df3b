from helpers import migrate
import sys
import argparse

def main():
    # Parse arguments
    parser = argparse.ArgumentParser(description="Migrate MongoDB collections between servers")
    parser.add_argument("--verbose", action="store_true", help="Show detailed log messages during migration")
    parser.add_argument("--dry-run", action="store_true", help="Print the export/import commands without running them")
    parser.add_argument("--temp-dir", type=str, help="Directory for the temporary export files")
    args = parser.parse_args()

    # Questions are asked interactively; flags only change how the run behaves
    if not migrate(verbose=args.verbose, dry_run=args.dry_run, temp_dir=args.temp_dir):
        sys.exit(1)

if __name__ == "__main__":
    main()
