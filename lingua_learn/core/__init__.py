"""Core building blocks shared by the server: logging, monitoring, security, persistence and schemas."""
