"""Release metadata for dependency updates.

Resolves a dependency's project URL from its published POM and generates
the candidate links (release notes, changelogs, version diffs) and branch
references a pull request for the update needs on each supported VCS host.
"""

__version__ = "0.1.0"
