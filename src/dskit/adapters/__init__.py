"""External store adapters.

Implementations of the Datastore protocol for hosted stores.

Usage:
    # Requires optional dependencies
    from dskit.adapters.cloud_datastore import CloudDatastore  # pip install dskit[gcloud]
"""
