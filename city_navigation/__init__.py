"""Route planning and map-region fitting for the Cidade Viva client."""
