from django import forms

GENDER_CHOICES = (
    ('', 'Select Gender'),
    ('Male', 'Male'),
    ('Female', 'Female'),
    ('Other', 'Other'),
)


class ProgramForm(forms.Form):
    name = forms.CharField(max_length=100)
    description = forms.CharField(widget=forms.Textarea, required=False)


class ClientForm(forms.Form):
    name = forms.CharField(max_length=255)
    age = forms.IntegerField(min_value=0)
    gender = forms.ChoiceField(choices=GENDER_CHOICES)
    phone = forms.CharField(max_length=30)
    address = forms.CharField(max_length=255)


class ClientSearchForm(forms.Form):
    name = forms.CharField(max_length=255, label='Client name')


class EnrollmentForm(forms.Form):
    """Pick one or more programs; choices are the programs not yet joined."""
    programs = forms.MultipleChoiceField(
        widget=forms.CheckboxSelectMultiple,
        error_messages={'required': 'Please select at least one program'},
    )

    def __init__(self, *args, programs=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['programs'].choices = [(p['id'], p['name']) for p in programs]
