"""devworkspaces - declarative development directory layouts with git-aware restore."""
