from django import forms

from campaigns.models import EmailTemplate
from producers.forms import CommaSeparatedField
from producers.models import Producer


class EmailTemplateForm(forms.ModelForm):
    variables = CommaSeparatedField(
        label="Variables",
        required=False,
        help_text="Séparées par des virgules; déduites du contenu si vide",
    )

    class Meta:
        model = EmailTemplate
        fields = ("name", "subject", "content", "variables")
        widgets = {"content": forms.Textarea(attrs={"rows": 12})}


class CampaignForm(forms.Form):
    SCHEDULE_IMMEDIATE = "immediate"
    SCHEDULE_LATER = "scheduled"

    name = forms.CharField(label="Nom", max_length=255)
    description = forms.CharField(label="Description", widget=forms.Textarea, required=False)
    template = forms.ModelChoiceField(
        label="Modèle d'email",
        queryset=EmailTemplate.objects.order_by("name"),
        required=False,
    )
    schedule_type = forms.ChoiceField(
        label="Envoi",
        choices=[(SCHEDULE_IMMEDIATE, "Immédiat"), (SCHEDULE_LATER, "Programmé")],
        initial=SCHEDULE_IMMEDIATE,
        widget=forms.RadioSelect,
    )
    scheduled_at = forms.DateTimeField(
        label="Date d'envoi",
        required=False,
        widget=forms.DateTimeInput(attrs={"type": "datetime-local"}),
    )
    producers = forms.ModelMultipleChoiceField(
        label="Destinataires",
        queryset=Producer.objects.order_by("company_name"),
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )

    @property
    def send_immediately(self) -> bool:
        return self.cleaned_data.get("schedule_type") == self.SCHEDULE_IMMEDIATE
