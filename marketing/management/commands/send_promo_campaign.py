"""
Send a promo campaign outside the dashboard

Usage:
    python manage.py send_promo_campaign --actor <username> --platform sms --message "Hi {name}!"
    python manage.py send_promo_campaign --actor <username> --platform telegram \
        --message "..." --filters filters.json --button-text "Order" --button-url https://...
    python manage.py send_promo_campaign --actor <username> --filters filters.json --preview
"""
import json

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from marketing.audience import PLATFORMS, AudienceRangeError, CampaignFilterSpec
from marketing.broadcast_service import CampaignDispatcher, CampaignError
from marketing.preview_service import preview_audience


class Command(BaseCommand):
    help = 'Send (or preview) an SMS / Telegram promo campaign as a staff user'

    def add_arguments(self, parser):
        parser.add_argument(
            '--actor',
            required=True,
            help='Username whose branch scope is applied'
        )
        parser.add_argument(
            '--platform',
            choices=PLATFORMS,
            default='sms',
            help='Delivery channel'
        )
        parser.add_argument(
            '--message',
            help='Message body with {placeholders}'
        )
        parser.add_argument(
            '--filters',
            help='Path to a JSON file with audience filters'
        )
        parser.add_argument(
            '--save-template',
            action='store_true',
            help='Store the message as a promo template after sending'
        )
        parser.add_argument(
            '--template-label',
            default='',
            help='Label for the saved template'
        )
        parser.add_argument(
            '--button-text',
            default='',
            help='Telegram inline button text'
        )
        parser.add_argument(
            '--button-url',
            default='',
            help='Telegram inline button URL'
        )
        parser.add_argument(
            '--preview',
            action='store_true',
            help='Only print the audience summary, send nothing'
        )

    def handle(self, *args, **options):
        actor = self._get_actor(options['actor'])
        filters = self._load_filters(options['filters'])
        filters['platform'] = options['platform']
        spec = CampaignFilterSpec.from_data(filters)

        try:
            if options['preview']:
                self._print_preview(preview_audience(actor, spec))
                return

            if not options['message']:
                raise CommandError('--message is required unless --preview is given')

            result = CampaignDispatcher().send_campaign(actor, spec, options['message'], {
                'save_template': options['save_template'],
                'template_label': options['template_label'],
                'telegram_button_text': options['button_text'],
                'telegram_button_url': options['button_url'],
            })
        except (AudienceRangeError, CampaignError) as e:
            raise CommandError(str(e))

        if result.matched:
            self.stdout.write(self.style.SUCCESS(result.summary_message()))
        else:
            self.stdout.write(self.style.WARNING(result.summary_message()))

    def _get_actor(self, username):
        User = get_user_model()
        try:
            return User.objects.get(username=username)
        except User.DoesNotExist:
            raise CommandError(f"User '{username}' does not exist")

    def _load_filters(self, path):
        if not path:
            return {}
        try:
            with open(path, encoding='utf-8') as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as e:
            raise CommandError(f"Could not read filters from {path}: {e}")
        if not isinstance(data, dict):
            raise CommandError('Filters file must contain a JSON object')
        return data

    def _print_preview(self, payload):
        summary = payload['summary']
        self.stdout.write(self.style.SUCCESS('=' * 60))
        self.stdout.write(self.style.SUCCESS('PROMO AUDIENCE PREVIEW'))
        self.stdout.write(self.style.SUCCESS('=' * 60))
        for key, value in summary.items():
            self.stdout.write(f"{key:<35} {value}")
        self.stdout.write('-' * 60)
        for row in payload['sample']:
            self.stdout.write(
                f"{row['name']:<30} orders={row['orders_count']:<4} "
                f"spent={row['total_spent']:<10} last={row['last_order_at']}"
            )
