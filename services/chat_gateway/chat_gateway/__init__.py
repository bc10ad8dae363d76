"""Chat Gateway: normalizing OpenRouter relay."""
