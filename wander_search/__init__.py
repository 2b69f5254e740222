"""WanderNav search service: typed dispatch of places/users/hazards queries."""
