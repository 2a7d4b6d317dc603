from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('trips', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='tripline',
            name='price_source',
            field=models.CharField(
                choices=[('resolved', 'Resolved from price history'), ('explicit', 'Entered on the trip')],
                default='resolved',
                max_length=10,
            ),
        ),
    ]
