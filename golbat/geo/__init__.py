"""Locations, area names, geofences and GeoJSON area matching."""