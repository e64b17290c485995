"""GitHub REST API access: transport, pagination and typed fetches."""
