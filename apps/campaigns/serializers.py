from rest_framework import serializers

from adserver.exceptions import NotFoundError
from . import store
from .models import Campaign, Ad


class AdSerializer(serializers.ModelSerializer):
    # Declared explicitly so existing ad ids can be resent on update
    id = serializers.CharField(required=False, max_length=64)
    duration_seconds = serializers.IntegerField(min_value=1, required=False)
    creative_id = serializers.CharField(required=False, max_length=100)
    campaign_id = serializers.ReadOnlyField()

    class Meta:
        model = Ad
        fields = ('id', 'campaign_id', 'media_url', 'duration_seconds', 'creative_id')

    def _xml_safe(self, value):
        if store.contains_xml_control_chars(value):
            raise serializers.ValidationError("Control characters are not allowed.")
        return value

    def validate_id(self, value):
        return self._xml_safe(value)

    def validate_media_url(self, value):
        return self._xml_safe(value)

    def validate_creative_id(self, value):
        return self._xml_safe(value)

    def validate(self, data):
        # An ad given only by media_url is copied from the available pool
        if 'duration_seconds' in data and 'creative_id' in data:
            return data
        try:
            pooled = store.get_ad_by_media_reference(data['media_url'])
        except NotFoundError:
            raise serializers.ValidationError(
                f"No available ad with media URL {data['media_url']}; "
                "duration_seconds and creative_id are required."
            )
        data.setdefault('duration_seconds', pooled.duration_seconds)
        data.setdefault('creative_id', pooled.creative_id)
        return data


class CampaignSerializer(serializers.ModelSerializer):
    id = serializers.CharField(required=False, max_length=64)
    ads = AdSerializer(many=True, required=False)

    class Meta:
        model = Campaign
        fields = (
            'id', 'name', 'start_time', 'end_time', 'target_region', 'ads',
            'created_at', 'updated_at',
        )
        read_only_fields = ('created_at', 'updated_at')

    def validate_target_region(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Target region is required ('*' for all regions).")
        return value

    def validate(self, data):
        if data['start_time'] >= data['end_time']:
            raise serializers.ValidationError({'end_time': "end_time must be after start_time."})
        if self.instance is None and not data.get('ads'):
            raise serializers.ValidationError({'ads': "A campaign needs at least one ad."})
        return data

    def create(self, validated_data):
        return store.create_campaign(**validated_data)

    def update(self, instance, validated_data):
        validated_data['id'] = instance.id
        if 'ads' not in validated_data:
            # Omitted ads keep the current set; a full update still rewrites it
            validated_data['ads'] = [
                {
                    'id': ad.id,
                    'media_url': ad.media_url,
                    'duration_seconds': ad.duration_seconds,
                    'creative_id': ad.creative_id,
                }
                for ad in instance.ads.all()
            ]
        return store.update_campaign(**validated_data)
