# accounting/api/serializers/period_close.py

from rest_framework import serializers

from accounting.models.period_close import PeriodClose


class ClosePeriodSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError("start_date cannot be after end_date")
        return attrs


class PeriodCloseSerializer(serializers.ModelSerializer):
    voucher_number = serializers.CharField(source="journal_voucher.voucher_number", read_only=True)

    class Meta:
        model = PeriodClose
        fields = ("id", "start_date", "end_date", "journal_voucher", "voucher_number", "closed_by", "created_at")
        read_only_fields = fields
