from django.core.management.base import BaseCommand

from marketing.template_service import SmsTemplateService


class Command(BaseCommand):
    help = 'Insert the SMS templates configured in settings.SMS_TEMPLATES that are missing'

    def handle(self, *args, **options):
        created = SmsTemplateService().sync_default_templates()
        if created:
            self.stdout.write(self.style.SUCCESS(f"Created {created} SMS template(s)"))
        else:
            self.stdout.write('SMS templates already up to date')
