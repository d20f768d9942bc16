"""tripmate: travel-companion matching backend."""
