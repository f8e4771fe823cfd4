"""
Constants and lookup data for the air quality core.
"""

# Pollutant names and properties, in dominant-pollutant tie-break order
POLLUTANTS = {
    'pm25': {
        'name': 'PM2.5',
        'full_name': 'Fine Particulate Matter',
        'unit': 'µg/m³',
        'description': 'Particles smaller than 2.5 micrometers',
    },
    'pm10': {
        'name': 'PM10',
        'full_name': 'Particulate Matter',
        'unit': 'µg/m³',
        'description': 'Particles smaller than 10 micrometers',
    },
    'ozone': {
        'name': 'Ozone',
        'full_name': 'Ozone',
        'unit': 'ppb',
        'description': 'Ground-level ozone',
    },
    'no2': {
        'name': 'NO2',
        'full_name': 'Nitrogen Dioxide',
        'unit': 'ppb',
        'description': 'Nitrogen dioxide',
    },
    'so2': {
        'name': 'SO2',
        'full_name': 'Sulfur Dioxide',
        'unit': 'ppb',
        'description': 'Sulfur dioxide',
    },
    'co': {
        'name': 'CO',
        'full_name': 'Carbon Monoxide',
        'unit': 'ppm',
        'description': 'Carbon monoxide',
    },
}

POLLUTANT_PRIORITY = ['pm25', 'pm10', 'ozone', 'no2', 'so2', 'co']

# Concentration upper bound of each band, per pollutant. The lower bound of
# band 0 is 0; the lower bound of band i is the upper bound of band i - 1.
CONCENTRATION_BREAKPOINTS = {
    'pm25': [12, 35.4, 55.4, 150.4, 250.4, 350.4, 500.4],
    'pm10': [54, 154, 254, 354, 424, 504, 604],
    'ozone': [54, 70, 85, 105, 200, 400, 500],
    'no2': [53, 100, 360, 649, 1249, 1649, 2049],
    'so2': [35, 75, 185, 304, 604, 804, 1004],
    'co': [4.4, 9.4, 12.4, 15.4, 30.4, 40.4, 50.4],
}

# Lower index bound of each band; band i covers [AQI_BREAKPOINTS[i], AQI_BREAKPOINTS[i + 1])
AQI_BREAKPOINTS = [0, 51, 101, 151, 201, 301, 401, 501]

AQI_MAX = 500

# Index categories (canonical table: slug <-> label <-> range <-> advice)
AQI_CATEGORIES = [
    {
        'slug': 'good',
        'label': 'Good',
        'min_value': 0,
        'max_value': 50,
        'color_hex': '#00E400',
        'health_message': 'Air quality is satisfactory, and air pollution poses little or no risk.',
        'recommendations': [
            'Enjoy outdoor activities',
            'Good day for outdoor exercise',
        ],
    },
    {
        'slug': 'moderate',
        'label': 'Moderate',
        'min_value': 51,
        'max_value': 100,
        'color_hex': '#FFFF00',
        'health_message': 'Air quality is acceptable. However, there may be a risk for some people, particularly those who are unusually sensitive to air pollution.',
        'recommendations': [
            'Sensitive individuals should consider reducing prolonged outdoor exertion',
            'Good day for most outdoor activities',
        ],
    },
    {
        'slug': 'unhealthy-sensitive',
        'label': 'Unhealthy for Sensitive Groups',
        'min_value': 101,
        'max_value': 150,
        'color_hex': '#FF7E00',
        'health_message': 'Members of sensitive groups may experience health effects. The general public is less likely to be affected.',
        'recommendations': [
            'Sensitive individuals should avoid prolonged outdoor exertion',
            'Everyone else should limit prolonged outdoor exertion',
        ],
    },
    {
        'slug': 'unhealthy',
        'label': 'Unhealthy',
        'min_value': 151,
        'max_value': 200,
        'color_hex': '#FF0000',
        'health_message': 'Some members of the general public may experience health effects; members of sensitive groups may experience more serious health effects.',
        'recommendations': [
            'Sensitive individuals should avoid all outdoor exertion',
            'Everyone else should avoid prolonged outdoor exertion',
        ],
    },
    {
        'slug': 'very-unhealthy',
        'label': 'Very Unhealthy',
        'min_value': 201,
        'max_value': 300,
        'color_hex': '#99004C',
        'health_message': 'Health alert: The risk of health effects is increased for everyone.',
        'recommendations': [
            'Everyone should avoid outdoor exertion',
            'Sensitive individuals should remain indoors',
        ],
    },
    {
        'slug': 'hazardous',
        'label': 'Hazardous',
        'min_value': 301,
        'max_value': 500,
        'color_hex': '#7E0023',
        'health_message': 'Health warning of emergency conditions: everyone is more likely to be affected.',
        'recommendations': [
            'Everyone should avoid all outdoor activities',
            'Remain indoors with windows closed',
        ],
    },
]

DEFAULT_ALERT_LEVELS = ['unhealthy', 'very-unhealthy', 'hazardous']

# Escalating location alerts, checked against the overall index
LOCATION_ALERT_THRESHOLDS = [
    {
        'min_value': 151,
        'type': 'unhealthy',
        'level': 'high',
        'message': 'Air quality is unhealthy for sensitive groups',
        'recommendations': None,  # reuse the result's own recommendations
    },
    {
        'min_value': 201,
        'type': 'very-unhealthy',
        'level': 'very-high',
        'message': 'Air quality is very unhealthy',
        'recommendations': ['Avoid outdoor activities', 'Stay indoors with windows closed'],
    },
    {
        'min_value': 301,
        'type': 'hazardous',
        'level': 'extreme',
        'message': 'Air quality is hazardous',
        'recommendations': ['Stay indoors', 'Use air purifiers', 'Avoid all outdoor activities'],
    },
]

# Notification channels and the transport each one is delivered through
CHANNEL_EMAIL = 'email'
CHANNEL_PHONE = 'phone'
TRANSPORT_EMAIL = 'email'
TRANSPORT_SMS = 'sms'

CHANNEL_TRANSPORTS = {
    CHANNEL_EMAIL: TRANSPORT_EMAIL,
    CHANNEL_PHONE: TRANSPORT_SMS,
}
