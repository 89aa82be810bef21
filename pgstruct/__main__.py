"""
pgstruct command line.

Usage:
    python -m pgstruct DSN [options]

Examples:
    python -m pgstruct postgres://localhost/app --schema public -o models.py
    python -m pgstruct postgres://localhost/app --typemap typemap.toml -x audit_log
"""

from pgstruct.codegen.main import main

if __name__ == "__main__":
    main()
