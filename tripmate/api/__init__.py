"""REST/service layer: config, models, schemas, services and presence."""
