"""Host-side collaborators: documents, workspace and notifications."""
