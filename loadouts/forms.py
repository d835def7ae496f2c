"""
Form for the "new loadout" page.

Field shapes come from the ``Loadout`` model; the name and budget ranges are
checked by ``loadouts.services.create_loadout`` so the page and the API
reject the same input.
"""
from __future__ import annotations

from django import forms

from .models import Loadout


class LoadoutForm(forms.ModelForm):

    class Meta:
        model = Loadout
        fields = ['name', 'description', 'budget', 'theme', 'prioritize']
        widgets = {
            'description': forms.Textarea(attrs={'rows': 3}),
        }

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        for name, field in self.fields.items():
            field.widget.attrs.setdefault('class', 'form-control')
            if name == 'budget':
                field.widget.attrs['inputmode'] = 'decimal'
