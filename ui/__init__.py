"""User interfaces for the ELIZA responder."""
