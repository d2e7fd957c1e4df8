"""Key management, secret redaction and outbound HTTP."""
