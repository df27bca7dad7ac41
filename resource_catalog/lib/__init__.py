"""
Shared helpers: logging, errors, frontmatter parsing, filesystem and git.
"""
