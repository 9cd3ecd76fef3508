"""Offline geocoding for site locations.

A fixed table of city centres stands in for a geocoding API, so sites
read from location facts can still be placed on the map when the fact
carries no coordinates of its own.
"""

from typing import Any

# City name (lowercase) -> (latitude, longitude)
CITY_COORDINATES: dict[str, tuple[float, float]] = {
    "new york": (40.7128, -74.0060),
    "los angeles": (34.0522, -118.2437),
    "chicago": (41.8781, -87.6298),
    "houston": (29.7604, -95.3698),
    "phoenix": (33.4484, -112.0740),
    "philadelphia": (39.9526, -75.1652),
    "san antonio": (29.4241, -98.4936),
    "san diego": (32.7157, -117.1611),
    "dallas": (32.7767, -96.7970),
    "san jose": (37.3382, -121.8863),
    "austin": (30.2672, -97.7431),
    "jacksonville": (30.3322, -81.6557),
    "fort worth": (32.7555, -97.3308),
    "columbus": (39.9612, -82.9988),
    "charlotte": (35.2271, -80.8431),
    "san francisco": (37.7749, -122.4194),
    "indianapolis": (39.7684, -86.1581),
    "seattle": (47.6062, -122.3321),
    "denver": (39.7392, -104.9903),
    "washington": (38.9072, -77.0369),
    "boston": (42.3601, -71.0589),
    "el paso": (31.7619, -106.4850),
    "detroit": (42.3314, -83.0458),
    "nashville": (36.1627, -86.7816),
    "portland": (45.5152, -122.6784),
    "memphis": (35.1495, -90.0490),
    "oklahoma city": (35.4676, -97.5164),
    "las vegas": (36.1699, -115.1398),
    "louisville": (38.2527, -85.7585),
    "baltimore": (39.2904, -76.6122),
    "milwaukee": (43.0389, -87.9065),
    "albuquerque": (35.0844, -106.6504),
    "tucson": (32.2226, -110.9747),
    "fresno": (36.7378, -119.7871),
    "sacramento": (38.5816, -121.4944),
    "kansas city": (39.0997, -94.5786),
    "mesa": (33.4152, -111.8315),
    "atlanta": (33.7490, -84.3880),
    "colorado springs": (38.8339, -104.8214),
    "raleigh": (35.7796, -78.6382),
    "omaha": (41.2565, -95.9345),
    "miami": (25.7617, -80.1918),
    "long beach": (33.7701, -118.1937),
    "virginia beach": (36.8529, -75.9780),
    "oakland": (37.8044, -122.2711),
    "minneapolis": (44.9778, -93.2650),
    "tulsa": (36.1540, -95.9928),
    "tampa": (27.9506, -82.4572),
    "arlington": (32.7357, -97.1081),
    "new orleans": (29.9511, -90.0715),
    "wichita": (37.6872, -97.3301),
    "cleveland": (41.4993, -81.6944),
    "bakersfield": (35.3733, -119.0187),
    "aurora": (39.7294, -104.8319),
    "anaheim": (33.8366, -117.9143),
    "honolulu": (21.3099, -157.8581),
    "santa ana": (33.7455, -117.8677),
    "corpus christi": (27.8006, -97.3964),
    "riverside": (33.9533, -117.3962),
    "lexington": (38.0406, -84.5037),
    "stockton": (37.9577, -121.2908),
    "henderson": (36.0395, -114.9817),
    "saint paul": (44.9537, -93.0900),
    "st. louis": (38.6270, -90.1994),
    "cincinnati": (39.1031, -84.5120),
    "pittsburgh": (40.4406, -79.9959),
    "greensboro": (36.0726, -79.7920),
    "lincoln": (40.8136, -96.7026),
    "plano": (33.0198, -96.6989),
    "anchorage": (61.2181, -149.9003),
    "buffalo": (42.8864, -78.8784),
    "fort wayne": (41.0793, -85.1394),
    "jersey city": (40.7178, -74.0431),
    "chula vista": (32.6401, -117.0842),
    "orlando": (28.5383, -81.3792),
    "norfolk": (36.8508, -76.2859),
    "chandler": (33.3062, -111.8413),
    "laredo": (27.5306, -99.4803),
    "madison": (43.0731, -89.4012),
    "lubbock": (33.5779, -101.8552),
    "winston-salem": (36.0999, -80.2442),
    "garland": (32.9126, -96.6389),
    "glendale": (33.5387, -112.1860),
    "hialeah": (25.8576, -80.2781),
    "reno": (39.5296, -119.8138),
    "baton rouge": (30.4515, -91.1871),
    "irvine": (33.6846, -117.8265),
    "chesapeake": (36.7682, -76.2875),
    "irving": (32.8140, -96.9489),
    "scottsdale": (33.4942, -111.9261),
    "north las vegas": (36.1989, -115.1175),
    "fremont": (37.5485, -121.9886),
    "gilbert": (33.3528, -111.7890),
    "san bernardino": (34.1083, -117.2898),
    "boise": (43.6150, -116.2023),
    "birmingham": (33.5207, -86.8025),
    "london": (51.5074, -0.1278),
    "paris": (48.8566, 2.3522),
    "berlin": (52.5200, 13.4050),
    "madrid": (40.4168, -3.7038),
    "rome": (41.9028, 12.4964),
    "amsterdam": (52.3676, 4.9041),
    "brussels": (50.8503, 4.3517),
    "vienna": (48.2082, 16.3738),
    "zurich": (47.3769, 8.5417),
    "stockholm": (59.3293, 18.0686),
    "oslo": (59.9139, 10.7522),
    "copenhagen": (55.6761, 12.5683),
    "helsinki": (60.1699, 24.9384),
    "dublin": (53.3498, -6.2603),
    "lisbon": (38.7223, -9.1393),
    "athens": (37.9838, 23.7275),
    "warsaw": (52.2297, 21.0122),
    "prague": (50.0755, 14.4378),
    "budapest": (47.4979, 19.0402),
    "bucharest": (44.4268, 26.1025),
    "sofia": (42.6977, 23.3219),
    "zagreb": (45.8150, 15.9819),
    "ljubljana": (46.0569, 14.5058),
    "bratislava": (48.1486, 17.1077),
    "tallinn": (59.4370, 24.7536),
    "riga": (56.9496, 24.1052),
    "vilnius": (54.6872, 25.2797),
    "moscow": (55.7558, 37.6176),
    "st. petersburg": (59.9311, 30.3609),
    "kiev": (50.4501, 30.5234),
    "minsk": (53.9006, 27.5590),
    "tokyo": (35.6762, 139.6503),
    "osaka": (34.6937, 135.5023),
    "kyoto": (35.0116, 135.7681),
    "yokohama": (35.4437, 139.6380),
    "seoul": (37.5665, 126.9780),
    "busan": (35.1796, 129.0756),
    "beijing": (39.9042, 116.4074),
    "shanghai": (31.2304, 121.4737),
    "guangzhou": (23.1291, 113.2644),
    "shenzhen": (22.5431, 114.0579),
    "hong kong": (22.3193, 114.1694),
    "taipei": (25.0330, 121.5654),
    "singapore": (1.3521, 103.8198),
    "kuala lumpur": (3.1390, 101.6869),
    "bangkok": (13.7563, 100.5018),
    "jakarta": (-6.2088, 106.8456),
    "manila": (14.5995, 120.9842),
    "mumbai": (19.0760, 72.8777),
    "delhi": (28.7041, 77.1025),
    "bangalore": (12.9716, 77.5946),
    "chennai": (13.0827, 80.2707),
    "kolkata": (22.5726, 88.3639),
    "hyderabad": (17.3850, 78.4867),
    "pune": (18.5204, 73.8567),
    "ahmedabad": (23.0225, 72.5714),
    "sydney": (-33.8688, 151.2093),
    "melbourne": (-37.8136, 144.9631),
    "brisbane": (-27.4698, 153.0251),
    "perth": (-31.9505, 115.8605),
    "adelaide": (-34.9285, 138.6007),
    "toronto": (43.6532, -79.3832),
    "montreal": (45.5017, -73.5673),
    "vancouver": (49.2827, -123.1207),
    "calgary": (51.0447, -114.0719),
    "ottawa": (45.4215, -75.6972),
    "edmonton": (53.5461, -113.4938),
    "winnipeg": (49.8951, -97.1384),
    "quebec city": (46.8139, -71.2080),
    "hamilton": (43.2557, -79.8711),
    "kitchener": (43.4516, -80.4925),
    "mexico city": (19.4326, -99.1332),
    "guadalajara": (20.6597, -103.3496),
    "monterrey": (25.6866, -100.3161),
    "puebla": (19.0414, -98.2063),
    "tijuana": (32.5149, -117.0382),
    "leon": (21.1619, -101.6921),
    "juarez": (31.6904, -106.4245),
    "zapopan": (20.7214, -103.3918),
    "nezahualcoyotl": (19.4003, -99.0145),
    "chihuahua": (28.6353, -106.0889),
    "naucalpan": (19.4779, -99.2386),
    "merida": (20.9674, -89.5926),
    "san luis potosi": (22.1565, -100.9855),
    "aguascalientes": (21.8853, -102.2916),
    "hermosillo": (29.0729, -110.9559),
    "saltillo": (25.4232, -101.0053),
    "mexicali": (32.6245, -115.4523),
    "culiacan": (24.7999, -107.3943),
    "sao paulo": (-23.5505, -46.6333),
    "rio de janeiro": (-22.9068, -43.1729),
    "brasilia": (-15.8267, -47.9218),
    "salvador": (-12.9714, -38.5014),
    "fortaleza": (-3.7319, -38.5267),
    "belo horizonte": (-19.9191, -43.9386),
    "manaus": (-3.1190, -60.0217),
    "curitiba": (-25.4284, -49.2733),
    "recife": (-8.0476, -34.8770),
    "porto alegre": (-30.0346, -51.2177),
    "buenos aires": (-34.6118, -58.3960),
    "cordoba": (-31.4201, -64.1888),
    "rosario": (-32.9442, -60.6505),
    "mendoza": (-32.8895, -68.8458),
    "tucuman": (-26.8083, -65.2176),
    "la plata": (-34.9215, -57.9545),
    "mar del plata": (-38.0055, -57.5426),
    "salta": (-24.7821, -65.4232),
    "santa fe": (-31.6333, -60.7000),
    "san juan": (-31.5375, -68.5364),
    "santiago": (-33.4489, -70.6693),
    "valparaiso": (-33.0472, -71.6127),
    "concepcion": (-36.8201, -73.0444),
    "antofagasta": (-23.6509, -70.3975),
    "temuco": (-38.7359, -72.5904),
    "rancagua": (-34.1701, -70.7436),
    "stalybridge": (53.4848, -2.0594),
    "manizales": (5.0703, -75.5138),
    "maywood": (40.9026, -74.0618),
    "vlissingen": (51.4426, 3.5736),
    "northfield": (44.4583, -93.1616),
}


def coordinates_for_city(city: str | None) -> tuple[float, float] | None:
    """Exact city match first, then the first entry either name contains."""
    if not city:
        return None
    normalized = city.strip().lower()
    if not normalized:
        return None
    if normalized in CITY_COORDINATES:
        return CITY_COORDINATES[normalized]
    for name, coords in CITY_COORDINATES.items():
        if name in normalized or normalized in name:
            return coords
    return None


def _explicit_coordinates(data: dict[str, Any]) -> tuple[float, float] | None:
    coords = data.get("coordinates")
    if not isinstance(coords, dict):
        return None
    latitude = coords.get("lat", coords.get("latitude"))
    longitude = coords.get("lng", coords.get("longitude", coords.get("lon")))
    if latitude is None or longitude is None:
        return None
    return float(latitude), float(longitude)


def coordinates_for_location(data: dict[str, Any]) -> tuple[float, float] | None:
    """Coordinates for a location fact's data.

    Explicit ``coordinates`` win. Otherwise the city is looked up, then each
    comma separated part of the address.
    """
    explicit = _explicit_coordinates(data)
    if explicit is not None:
        return explicit

    found = coordinates_for_city(data.get("city"))
    if found is not None:
        return found

    address = data.get("address")
    if isinstance(address, str):
        for part in address.split(","):
            found = coordinates_for_city(part)
            if found is not None:
                return found
    return None


def is_valid_coordinates(latitude: float, longitude: float) -> bool:
    return -90 <= latitude <= 90 and -180 <= longitude <= 180
