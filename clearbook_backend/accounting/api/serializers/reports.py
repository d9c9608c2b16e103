# accounting/api/serializers/reports.py

from rest_framework import serializers


class AsOfQuerySerializer(serializers.Serializer):
    as_of = serializers.DateField(required=False)


class DateRangeQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError("start_date cannot be after end_date")
        return attrs


class GeneralLedgerQuerySerializer(DateRangeQuerySerializer):
    account_id = serializers.IntegerField(required=False)


class AccountStatementQuerySerializer(DateRangeQuerySerializer):
    account_code = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()


class OpeningBalanceLineSerializer(serializers.Serializer):
    account_id = serializers.IntegerField()
    debit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=0, min_value=0)
    credit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=0, min_value=0)


class OpeningBalancesSerializer(serializers.Serializer):
    as_of = serializers.DateField()
    lines = OpeningBalanceLineSerializer(many=True, allow_empty=False)


class IncomeTaxQuerySerializer(DateRangeQuerySerializer):
    income_tax_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False)
    education_tax_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )
