"""Tag services: recognition, editing and link redirection."""
