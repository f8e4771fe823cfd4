from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='AlertSubscription',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('subscription_id', models.CharField(db_index=True, max_length=40, unique=True)),
                ('lat', models.DecimalField(db_index=True, decimal_places=6, max_digits=9)),
                ('lng', models.DecimalField(db_index=True, decimal_places=6, max_digits=9)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('phone', models.CharField(blank=True, max_length=32)),
                ('alert_levels', models.JSONField(default=list)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
            ],
            options={
                'verbose_name': 'Alert Subscription',
                'verbose_name_plural': 'Alert Subscriptions',
                'ordering': ['created_at'],
                'indexes': [
                    models.Index(fields=['lat', 'lng'], name='alert_sub_location_idx'),
                    models.Index(fields=['is_active', 'created_at'], name='alert_sub_active_idx'),
                ],
            },
        ),
    ]
