"""Config tree resolution and restore engine.

This package contains the core components, leaf-first:

- **paths**: Root token expansion (``~`` -> home directory)
- **tree**: Document validation and node tree construction, path lookup
- **walker**: Lazy pre-order enumeration of workspaces and projects
- **resolver**: Git override merge (global -> workspace chain -> project)
- **git**: Clone command construction and the subprocess-backed cloner
- **restore**: Idempotent restore of missing directories -> RestoreReport
- **doctor**: Missing-path diagnosis

Engine modules raise domain exceptions (``ValueError`` / ``LookupError`` /
``RuntimeError`` subclasses), never click exceptions -- that translation is
the CLI's responsibility.
"""
