"""Package-metadata clients.

These modules fetch project descriptors (POMs) from package repositories
and turn them into the ProjectDescriptor schema the resolver reads.
"""
