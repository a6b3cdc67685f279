"""RouteMap: Geocoding Gateway 및 경로 탐색 client"""
