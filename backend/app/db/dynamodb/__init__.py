"""DynamoDB access for the catalog: resource setup, retries, typed errors and a table wrapper."""
