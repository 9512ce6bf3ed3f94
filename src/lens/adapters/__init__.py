"""Host adapters embedding lens in concrete UI toolkits."""
