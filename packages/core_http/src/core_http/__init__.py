"""HTTP plumbing shared by services: upstream client, error envelope, header names."""
