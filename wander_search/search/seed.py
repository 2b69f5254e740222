"""Seed records for the in-memory stores (local development and demos)."""

PLACES = [
    {
        "id": "1",
        "name": "Central Park",
        "description": "Popular park in NYC",
        "latitude": 40.7829,
        "longitude": -73.9654,
        "keywords": ["park", "nature", "manhattan"],
    },
    {
        "id": "2",
        "name": "Times Square",
        "description": "Famous intersection",
        "latitude": 40.7580,
        "longitude": -73.9855,
        "keywords": ["landmark", "broadway", "manhattan"],
    },
    {
        "id": "3",
        "name": "Brooklyn Bridge Park",
        "description": "Waterfront park under the bridge",
        "latitude": 40.7003,
        "longitude": -73.9967,
        "keywords": ["park", "waterfront", "brooklyn"],
    },
    {
        "id": "4",
        "name": "Prospect Park",
        "description": "Large park in Brooklyn",
        "latitude": 40.6602,
        "longitude": -73.9690,
        "keywords": ["park", "brooklyn"],
    },
]

USERS = [
    {"id": "1", "name": "john_doe", "username": "john_doe", "description": "User"},
    {"id": "2", "name": "jane_smith", "username": "jane_smith", "description": "User"},
    {"id": "3", "name": "alex_rider", "username": "alex_rider", "description": "Cyclist"},
]

HAZARDS = [
    {
        "id": "1",
        "name": "Construction Zone",
        "description": "Road construction ahead",
        "latitude": 40.7829,
        "longitude": -73.9654,
        "hazard_type": "construction",
        "severity": 0.6,
    },
    {
        "id": "2",
        "name": "Traffic Jam",
        "description": "Heavy traffic on route",
        "latitude": 40.7580,
        "longitude": -73.9855,
        "hazard_type": "traffic",
        "severity": 0.4,
    },
    {
        "id": "3",
        "name": "Flooded Underpass",
        "description": "Standing water after heavy rain",
        "latitude": 40.7061,
        "longitude": -74.0087,
        "hazard_type": "flood",
        "severity": 0.9,
    },
]
