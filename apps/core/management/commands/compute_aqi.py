"""
Management command to compute the air quality index for one location.
"""
import json

from django.core.management.base import BaseCommand, CommandError

from apps.airquality.container import AirQualityCore
from apps.core.constants import POLLUTANT_PRIORITY
from apps.core.exceptions import InvalidInput


class Command(BaseCommand):
    help = 'Compute the air quality index for a location from pollutant concentrations'

    def add_arguments(self, parser):
        parser.add_argument('--lat', type=float, required=True)
        parser.add_argument('--lng', type=float, required=True)
        for code in POLLUTANT_PRIORITY:
            parser.add_argument(f'--{code}', type=float, default=None)
        parser.add_argument(
            '--alerts',
            action='store_true',
            help='Print the escalating alert summary instead of the index result',
        )

    def handle(self, *args, **options):
        concentrations = {
            code: options[code]
            for code in POLLUTANT_PRIORITY
            if options[code] is not None
        }

        with AirQualityCore() as core:
            try:
                if options['alerts']:
                    output = core.service.get_alerts(options['lat'], options['lng'], concentrations)
                else:
                    result = core.service.get_current(options['lat'], options['lng'], concentrations)
                    output = result.to_dict()
            except InvalidInput as e:
                raise CommandError(str(e))

        self.stdout.write(json.dumps(output, indent=2))
        if not options['alerts']:
            self.stdout.write(self.style.SUCCESS(
                f"\nAQI {output['aqi']} - {output['category_label']}"
            ))
