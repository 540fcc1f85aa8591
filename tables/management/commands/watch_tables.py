import json

from django.core.management.base import BaseCommand

from tables.events import TableEventChannel


class Command(BaseCommand):
    help = "Print a restaurant's table events as they are published"

    def add_arguments(self, parser):
        parser.add_argument('admin_uid')

    def handle(self, *args, **options):
        channel = TableEventChannel()
        pubsub = channel.subscribe(options['admin_uid'])
        self.stdout.write(f"Listening on {channel.channel_name(options['admin_uid'])} (Ctrl+C to stop)")

        try:
            for message in pubsub.listen():
                event = json.loads(message['data'])
                table = event.get('table_number', '-')
                self.stdout.write(f"{event['at']} | table {table} | {event['event']}")
        except KeyboardInterrupt:
            pass
        finally:
            pubsub.close()
