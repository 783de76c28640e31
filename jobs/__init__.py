"""Jobs ejecutables (una corrida por invocación)."""
