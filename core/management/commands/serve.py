from daphne.cli import CommandLineInterface
from django.apps import apps
from django.conf import settings
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = "Serve HTTP and WebSocket traffic with Daphne on 0.0.0.0:PORT."

    def add_arguments(self, parser):
        parser.add_argument("--host", default="0.0.0.0")
        parser.add_argument("--port", type=int, default=settings.PORT)

    def handle(self, *args, **opts):
        self.stdout.write(self.style.SUCCESS(f"Clinic backend on http://{opts['host']}:{opts['port']} (env={settings.ENV})"))
        try:
            CommandLineInterface().run(["-b", opts["host"], "-p", str(opts["port"]), "clinic.asgi:application"])
        finally:
            # Daphne returns once it has handled SIGINT/SIGTERM.
            apps.get_app_config("core").shutdown()
            self.stdout.write("Server closed")
