"""External integrations - durable slots and the marketplace HTTP backend."""
