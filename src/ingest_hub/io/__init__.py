"""I/O ring: connection gateways, format readers and the transactional loader."""
