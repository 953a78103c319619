"""Extensions - transport bindings for the gateway."""
